# Services package init
"""
Catalog Backend: Services Layer
================================

What:  Business logic between the routes (HTTP) and the database.
How:   Services receive the request's AsyncSession per call and return
       response schemas. `create_app` builds one instance of each and
       stores it on `app.state`; routes get them through dependencies.

Service Inventory:
    - ImageResizer (abstract): bounding-box resize contract
    - PillowResizer: Pillow implementation (default)
    - ImagePipeline: decode → store original → resize → store resized
    - CategoryService: category CRUD, parent checks, inline pictures
    - ProductService: product CRUD, category checks
"""
