"""
Sakila Rentals Backend — API Routes Package
=============================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource.

Route Inventory:
    - films.py:     GET  /api/films                          (paginated catalog)
                    GET  /api/films/search                   (filtered catalog)
                    POST /api/films/by-categories            (films per category)
                    GET  /api/films/{id}/availability        (copies at a store)
    - inventory.py: GET  /api/inventory/counts               (copy counts per group)
    - rentals.py:   POST /api/rentals                        (rent one or more copies)
                    POST /api/rentals/{id}/return            (close a rental)
                    GET  /api/rentals/active                 (open rentals)
                    GET  /api/rentals/overdue                (open rentals past the threshold)
    - auth.py:      POST /api/auth/signup, /api/auth/signin
    - users.py:     GET  /api/users, GET/PUT /api/users/{id}
    - health.py:    GET  /health

Design Principle:
    Routes are THIN: extract request data, call one service method,
    return its response model. Business logic lives in services.
"""
