"""
Entry point for running classtable as a module.

Usage:
    python -m classtable generate --class C10 -o timetable.json
    python -m classtable show timetable.json
    python -m classtable edit timetable.json --day monday --index 0 --subject MATH
    python -m classtable move-break timetable.json --from 2 --to 0
"""

from classtable.cli import main

if __name__ == "__main__":
    main()
