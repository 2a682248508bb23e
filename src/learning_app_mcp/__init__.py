"""learning-app-mcp — turn YouTube videos into interactive learning apps."""
