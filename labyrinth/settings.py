"""Game-wide constants shared by the dungeon modules."""

# Size of one tile in world units (pixels)
TILE_SIZE: int = 64

# Seconds it takes a room or door to fade in when first lit
FADE_IN_TIME: float = 1.0

# Alpha a fade starts from
FADE_START_ALPHA: float = 0.05
