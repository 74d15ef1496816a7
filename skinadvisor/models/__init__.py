"""
Domain models: ingredient records, skin traits and the image heuristic.
"""
