"""
Service layer.

``user_store`` owns persistence, ``validation`` checks payloads,
``user_handler`` implements the user operations and ``outcome`` defines
the result values they return.
"""
