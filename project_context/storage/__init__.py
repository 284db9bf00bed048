"""Default Chroma-backed indexing engine"""
