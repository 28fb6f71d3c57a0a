import time

# Import the necessary components
from assistant_parser import (
    AssistantMessageParser,
    ChunkType,
    ParserOptions,
    StreamChunk,
    StreamingParser,
)
from assistant_parser.stream_handler import split_fragments

RESPONSE = """I'll look at the config before changing anything.
<thinking>
The settings probably live in src/config.ts.
</thinking>
<tool name="read_file">
{"path": "src/config.ts"}
</tool>
Once I have it, I'll run:
```bash
npm test
```
<tool name="execute_command"><command>npm test</command><timeout>60</timeout></tool>"""


# Example of a chunk callback for a UI
def ui_callback(chunk: StreamChunk) -> None:
    """Example callback for a chat UI.

    In a real app, this would:
    1. Append text to the visible message
    2. Show a spinner when a tool call starts
    3. Queue the finished tool call for execution
    """
    if chunk.type == ChunkType.TEXT:
        print(chunk.content, end="", flush=True)
    elif chunk.type == ChunkType.TOOL_START:
        print(f"\n[running {chunk.tool_name}...]", flush=True)
    elif chunk.type == ChunkType.TOOL_END:
        print(f"[{chunk.tool_name} params: {chunk.tool_params}]", flush=True)


def main():
    # 1. Pick the markup options
    # Defaults are <tool name="..."> and <thinking>
    options = ParserOptions()

    # Example: a model prompted with <function> tags
    # options = ParserOptions(tool_tag_name="function")

    # 2. Parse a complete response in one pass
    parser = AssistantMessageParser(options)
    result = parser.parse(RESPONSE)
    print(f"Blocks: {[block.type.value for block in result.blocks]}")
    for tool_call in result.tool_calls:
        print(f"Tool call: {tool_call.name} {tool_call.params} at {tool_call.start}-{tool_call.end}")

    # 3. Or stream it, as the text arrives from the model
    print("\nStreaming response:")
    streaming = StreamingParser(ui_callback, options)
    for fragment in split_fragments(RESPONSE, 7):
        streaming.feed(fragment)
        time.sleep(0.01)
    streaming.flush()

    # 4. Tool calls are ready once the stream ends
    print(f"\n\nCollected {len(streaming.get_tool_calls())} tool calls")


if __name__ == "__main__":
    main()
