"""Snapshot storage"""
