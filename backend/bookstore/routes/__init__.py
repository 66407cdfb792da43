# Routes package init
"""
Bookstore Backend — API Routes Package
========================================

Route Inventory:
    - books.py:   GET/POST /books, GET/PUT/DELETE /books/{isbn}
    - health.py:  GET /health

Routes stay thin: read the request, call the validator and the store,
wrap the result in its envelope. Unmatched paths are answered by the
catch-all registered in main.py.
"""
