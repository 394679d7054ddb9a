# Services package init
"""
Sakila Rentals Backend — Services Layer
=========================================

What:  Business logic between routes (HTTP) and repositories (SQL).
How:   Each service is a stateless class with a module-level singleton;
       methods take the request's AsyncSession and return response models.

Service Inventory:
    - AvailabilityService: which copies are rentable, copy counts
    - RentalService:       create/return rentals, active and overdue lists
    - AccountService:      signup, signin, user administration
    - CatalogService:      film listing, search, films per category
    - storage_errors:      maps storage failures to DatabaseError
    - passwords:           argon2id hashing and legacy digest support
"""
