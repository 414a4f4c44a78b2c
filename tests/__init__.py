"""Tests for the Xiaomi Air Purifier 3C integration."""
