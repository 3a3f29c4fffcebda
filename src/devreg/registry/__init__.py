"""Device Registry Module.

This module keeps a catalog of devices (each with an uploaded photo) and
records which user holds which device:
- Register devices by uploading their photo
- Create users
- Assign devices to users and release them again
- List, edit and delete catalog devices

Architecture: Clean Architecture with Hexagonal (Ports & Adapters)
"""
