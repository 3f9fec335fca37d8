"""
Higher-level methods to control services.

Each public function in this module should:

- perform a complete task, as needed by a script or pipeline step
- avoid non-idempotent calls unless required by the current state of the service
- open and release handles for any services needed by plumbing
"""
