# finance_backend/notes.py
from .resources import Resource, resource_blueprint

NOTE_TYPES = ("tip", "goal", "reminder")
NOTE_PRIORITIES = ("low", "medium", "high")


class NoteResource(Resource):
    name = "notes"
    table = "notes"
    columns = ("title", "content", "type", "priority", "tags")
    json_columns = ("tags",)

    def rules(self, v, user_id):
        v.string("title", required=True, msg="Title is required", max_length=200)
        v.string("content", required=True, msg="Content is required", max_length=5000)
        v.choice("type", NOTE_TYPES, default="tip")
        v.choice("priority", NOTE_PRIORITIES, default="medium")
        v.tags("tags")


notes = NoteResource()
bp = resource_blueprint(notes, "/api/notes")
