"""Small pure helpers shared by the db and service layers."""
