"""
The APP layer owns the mutable playback state (Qt signals) and the frame driver.
"""
