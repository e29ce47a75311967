"""Command line tool for selecting objects from a local cluster snapshot."""
