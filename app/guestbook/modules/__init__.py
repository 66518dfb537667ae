"""
Feature modules live under this package.

Keep module boundaries clean: each module owns its routes and service functions,
while reusing platform primitives (auth, errors, storage).
"""
