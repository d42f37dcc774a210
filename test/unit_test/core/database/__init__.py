"""Tests for the database layer: engine helpers and repositories."""
