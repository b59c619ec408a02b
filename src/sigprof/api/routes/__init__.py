"""
Debug routes - each module exposes create_router() so every app gets its
own router instances
"""
