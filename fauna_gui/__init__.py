"""Desktop front end for the fauna globe: glfw/moderngl rendering, a PySide6 panel and data loading."""
