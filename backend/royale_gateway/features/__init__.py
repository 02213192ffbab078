"""Gateway features: clan members and player projections."""
