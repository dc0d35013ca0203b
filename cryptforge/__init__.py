"""cryptforge: deterministic procedural dungeon level generation."""
