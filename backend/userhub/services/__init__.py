# Services package init
"""
UserHub Backend — Services Package
====================================

    - user_service.py: CRUD operations and the list query builder
"""
