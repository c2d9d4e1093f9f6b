"""Static English/Amharic string catalogues bundled as package data."""
