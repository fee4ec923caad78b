# Routes package init
"""
Catalog Backend: API Routes Package
====================================

Route Inventory:
    - health.py:      GET  /                     (welcome + counts)
                      GET  /health               (database probe)
    - categories.py:  GET/POST        /categories
                      GET/PUT/DELETE  /categories/{id}
    - products.py:    GET/POST        /products
                      GET/PUT/DELETE  /products/{id}
    - images.py:      POST /upload               (base64 picture → original + resized)
                      GET  /images/{filename}    (serve a stored image)

Routes stay thin: read the request, call a service, return its model.
"""
