import sys
import json
import logging
import os

from .converter import HTMLTableConverter, parse_errors

logger = logging.getLogger(__name__)

USAGE = "Usage: html2xl [--check] INPUT [OUTPUT]"


def main(argv=None):
    logging.basicConfig(level=logging.INFO,
                        format='%(message)s',
                        stream=sys.stderr)
    args = list(sys.argv[1:] if argv is None else argv)

    check_only = '--check' in args
    if check_only:
        args.remove('--check')

    if not args or len(args) > 2:
        print(json.dumps({"success": False, "error": f"Missing input file path. {USAGE}"}))
        return 1

    input_file = args[0]
    output_file = args[1] if len(args) > 1 else os.path.splitext(input_file)[0] + '.xlsx'

    try:
        # Read HTML content
        with open(input_file, 'r', encoding='utf-8') as f:
            html_content = f.read()

        if check_only:
            errors = parse_errors(html_content)
            print(json.dumps({"invalid": bool(errors), "errors": errors}))
            return 0

        # Convert to Excel
        data = HTMLTableConverter().convert(html_content)

        with open(output_file, 'wb') as f:
            f.write(data)

        print(json.dumps({"success": True, "output": output_file}))
        return 0

    except Exception as e:
        print(json.dumps({"success": False, "error": str(e)}))
        return 1


if __name__ == "__main__":
    sys.exit(main())
