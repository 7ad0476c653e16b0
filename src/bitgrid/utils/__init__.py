"""Array-level helpers behind :class:`bitgrid.BitGrid`."""
