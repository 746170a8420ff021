"""Domain primitives shared by the progression map and workout sessions."""
