"""
Marketplace business rules.

Pure, framework-free functions shared by the API routers and services. Nothing
in this package touches the database or the network; callers pass in entities
or plain values and persist the results themselves.
"""
