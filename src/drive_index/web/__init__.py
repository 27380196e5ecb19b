"""Presentation layer shared by the serverless and server front ends."""
