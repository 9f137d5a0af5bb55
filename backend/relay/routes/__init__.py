# Routes package init
"""
Arduino Relay - API Routes Package
===================================

Route Inventory:
    - ingest.py:  POST /arduino-data   (store one JSON payload)
    - health.py:  GET  /health         (service + Firebase health)

Design Principle:
    Routes are THIN. They pull the payload and the sink from dependencies,
    call the sink, and turn its result into a response.
"""
