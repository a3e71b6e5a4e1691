"""Export file names and the header strings read from each export.

Headers are kept verbatim, including the lookup/rollup markers the
spreadsheet tool prefixes them with ("[>]", "[*]", "[h]").
"""
from __future__ import annotations

COURSE_FILE = "Course.csv"
UNIT_FILE = "Unit.csv"
CHUNK_FILE = "Chunk.csv"
EXERCISE_FILE = "Exercise.csv"
RESOURCE_FILE = "Chunk-Resource.csv"

SOURCE_FILES = {
    "courses": COURSE_FILE,
    "units": UNIT_FILE,
    "chunks": CHUNK_FILE,
    "resources": RESOURCE_FILE,
    "exercises": EXERCISE_FILE,
}

# Course.csv
COURSE_NAME = "Course"
COURSE_SLUG = "Course slug"
COURSE_DESCRIPTION = "Short course description"
COURSE_STATUS = "Status"
COURSE_UNITS = "[>] Units"

# Unit.csv
UNIT_TOPIC = "Topic"
UNIT_COURSE_UNIT = "[h] [*] Course-Unit"
UNIT_COURSE = "Course"
UNIT_ORDER = "Order"
UNIT_DURATION = "Unit duration (mins)"
UNIT_CHUNKS = "[>] Chunks"

# Chunk.csv
CHUNK_TITLE = "Title"
CHUNK_UNIT = "[>] Unit"
CHUNK_ORDER = "Order"
CHUNK_TIME = "[*] Time (mins)"
CHUNK_CONTENT = "Content"

# Chunk-Resource.csv
RESOURCE_NAME = "[>] Resource name"
RESOURCE_URL = "[>] URL"
RESOURCE_AUTHORS = "[>] Authors"
RESOURCE_YEAR = "[>] Year"
RESOURCE_TYPE = "[>] Type"
RESOURCE_TIME = "Time (mins)"
RESOURCE_GUIDE = "Guide"
RESOURCE_ORDER = "Order"
RESOURCE_STATUS = "Status"
RESOURCE_CHUNK = "[>] Chunk"

# Exercise.csv
EXERCISE_TITLE = "Title"
EXERCISE_TEXT = "[h] Text"
EXERCISE_TYPE = "Type"
EXERCISE_TIME = "Time (mins)"
EXERCISE_ORDER = "Order"
EXERCISE_CHUNK = "[>] Chunk"
