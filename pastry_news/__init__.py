"""
Pastry News backend.

A FastAPI service for the culinary news site: public article and category
browsing, an authenticated back office for staff, and record storage on the
Firebase Realtime Database (with in-memory and SQL stores for local work and
tests).
"""
