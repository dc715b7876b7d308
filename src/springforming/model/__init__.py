"""
The MODEL layer contains pure data structures and the forming process logic.
It has NO knowledge of Qt or of any renderer.
It deals with the process timeline, spring geometry, machine layout and I/O.
"""
