"""
Vote Chess package.

Components:
- engine: TurnEngine, the shared game state (rosters, proposals, resolution)
- tally: vote counting and winner selection
- referee/move_validator: python-chess board wrapper and move text matching
- scheduler: background timer that resolves a turn at every deadline
- api: thin Flask transport over the engine
"""
# Package exports are intentionally minimal; import modules directly as needed.
