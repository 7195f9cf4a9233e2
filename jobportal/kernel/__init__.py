"""
Kernel layer: the account model and the identity core built on it.

Nothing in here reads configuration from the environment; settings are
passed in by the API layer.
"""
