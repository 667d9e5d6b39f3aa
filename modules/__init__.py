"""
Feature modules for the Hackboard backend.

Each module keeps its contract in interfaces.py (Protocols), its data in
models.py and its errors in exceptions.py, with the implementation in
service.py. Modules talk to each other only through those interfaces.
"""
