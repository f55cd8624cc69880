"""Protocol primitives: errors, settings, hashing and the wire codec."""
