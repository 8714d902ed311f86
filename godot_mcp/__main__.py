from godot_mcp.server import main

main()
