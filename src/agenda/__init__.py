"""Agenda - event scheduling engine."""
