"""Tests for the compliance emitters."""
