"""Storage primitives shared by the library and the command line tools."""
