"""Core run machinery: workspace, enumeration, builds, redirect, publication."""
