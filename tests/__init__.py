"""Test suite for drone_pathfinder"""
