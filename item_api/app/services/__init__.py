"""
Service layer abstraction.

``item_store`` encapsulates persistence and ``item_service`` the
business logic, including the asynchronous operations run on the
bounded executor.  API handlers only talk to ``ItemService``.
"""
