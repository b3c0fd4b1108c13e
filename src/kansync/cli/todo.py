"""Handlers for 'kansync todo' and 'kansync note' commands."""

import sys

from kansync.cli._common import CommandError, output_json, output_result, run_session
from kansync.ids import match_ids, short_id


def _find_todo(session, prefix: str):
    matches = match_ids(prefix, [t.id for t in session.todos.items()])
    if len(matches) != 1:
        raise CommandError(f"Todo '{prefix}' not found." if not matches else f"Todo '{prefix}' is ambiguous.")
    return session.todos.get(matches[0])


def _todo_json(todo) -> dict:
    return {"id": todo.id, "text": todo.text, "completed": todo.completed}


def todo_list(args) -> int:
    """List todos in creation order."""
    todos = run_session(args, lambda session: session.todos.items())
    if args.json:
        output_json([_todo_json(t) for t in todos])
    else:
        for todo in todos:
            mark = "x" if todo.completed else " "
            print(f"[{mark}] {short_id(todo.id)}  {todo.text}")
    return 0


def todo_add(args) -> int:
    todo = run_session(args, lambda session: session.add_todo(args.text))
    output_result(_todo_json(todo), f"Added todo {short_id(todo.id)}", args.json)
    return 0


def todo_toggle(args) -> int:
    todo = run_session(args, lambda session: session.toggle_todo(_find_todo(session, args.id).id))
    state = "done" if todo.completed else "open"
    output_result(_todo_json(todo), f"Todo {short_id(todo.id)} is {state}", args.json)
    return 0


def todo_delete(args) -> int:
    todo = run_session(args, lambda session: session.delete_todo(_find_todo(session, args.id).id))
    output_result({"id": todo.id}, f"Deleted todo {short_id(todo.id)}", args.json)
    return 0


def note_get(args) -> int:
    """Print the note."""
    content = run_session(args, lambda session: session.state.notes.content)
    if args.json:
        output_json({"content": content})
    else:
        sys.stdout.write(content)
        if content and not content.endswith("\n"):
            sys.stdout.write("\n")
    return 0


def note_set(args) -> int:
    """Replace the note with stdin."""
    content = sys.stdin.read()
    run_session(args, lambda session: session.set_notes(content))
    output_result({"content": content}, "Updated notes", args.json)
    return 0
