"""Tests for policy-nucleus."""
