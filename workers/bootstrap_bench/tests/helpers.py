"""Native-builder command templates shared by the test modules."""

# Copies the artifact to the output path and marks it executable.
COPY_BUILDER = ("sh", "-c", 'cp "$0" "$1" && chmod +x "$1"', "{artifact}", "{output}")

# Produces an executable that always fails when run.
BROKEN_BUILDER = (
    "sh", "-c",
    'printf "#!/bin/sh\\necho broken >&2\\nexit 2\\n" > "$1" && chmod +x "$1"',
    "{artifact}", "{output}",
)
