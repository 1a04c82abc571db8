"""Undoable edits: delete, root, extrude, fit circle, transform, smooth, pad and project."""