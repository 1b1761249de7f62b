"""Reviewer-facing surface: pending listing and approve/reject actions."""
