"""
Console entrypoints, registered with setup via `utils.ENTRYPOINTS`.
"""
