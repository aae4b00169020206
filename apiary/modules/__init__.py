"""Hive engine feature modules: catalog, hive, perks and rewards."""
