"""Hajj Care: pilgrim medical profiles with shareable emergency links."""
