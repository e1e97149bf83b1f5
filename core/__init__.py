"""Gesture models, ports and the engine state machine."""
