"""Core terrain processing: parsing, tiling, meshing, coordinates, and flow."""
