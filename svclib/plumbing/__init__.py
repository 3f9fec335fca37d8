"""
Low-level APIs for fine-grained service management.

Each public function in this module should:

- perform a single action against a single service
- raise an exception on any failures, unless documented to return a `Fault`
- accept handle objects as arguments rather than managing their own

Each function also falls into one of two groups:

- getters (returns a value directly, does not modify state)
- actions (returns a `Result` object, may modify state)
"""
