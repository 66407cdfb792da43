# Services package init
"""
Bookstore Backend — Services Layer
====================================

Service Inventory:
    - BookValidator: JSON Schema validation of request bodies
    - BookStore:     CRUD against the books table

Both are usable without HTTP, which is how the unit tests exercise them.
"""
