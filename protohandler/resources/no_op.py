"""Default activation script.

protohandler binds ``Uri`` and ``LogFile`` before running this file and
collects everything passed to ``emit`` (or printed) as script output.
Replace it, or point ``ScriptPath`` in protohandler.json elsewhere, to make
the handler do something useful.
"""

emit(f"no-op script received {Uri}")  # noqa: F821
