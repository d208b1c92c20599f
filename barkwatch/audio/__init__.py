"""Capture-side helpers: detector, recorder, codec and loudness stats."""
