# Repositories package init
"""
Sakila Rentals Backend — Repository Layer
===========================================

What:  Named, parameterized queries, one function per query shape.
Why:   Services never build SQL ad hoc; every statement the application
       runs is defined here with typed arguments and bound parameters.
How:   Plain async functions taking an AsyncSession as first argument.
       They return ORM objects, rows or scalars and never raise application
       exceptions; translating None / IntegrityError into domain errors is
       the service layer's job.

Modules:
    - common.py:    existence checks and offset pagination helpers
    - catalog.py:   film listing and typed film search
    - inventory.py: per-copy availability and copy-count aggregation
    - rentals.py:   conditional rental insert, return update, open/overdue scans
    - accounts.py:  user lookups for signup, signin and user edits
"""
