# Routes package init
"""
Koalab Backend: API Routes Package
===================================

Route Inventory:
    - user.py:    POST /api/user                      (sign in, set session cookie)
    - boards.py:  GET/POST /api/boards                (behind the session gate)
                  GET  /api/boards/{id}
                  GET/POST /api/boards/{id}/postits
    - health.py:  GET  /health                         (store probe)

Routes only extract request data, call a service and return its result.
"""
