import logging
import sys

from idlwire.bootstrap.config.loader import get_cli_args
from idlwire.bootstrap.deps import get_config, get_dispatcher, get_renderer
from idlwire.core.errors import IdlError
from idlwire.core.helpers.utils import scan, setup_logging


@scan("idlwire.bootstrap.commands")
def main() -> int:
    args = get_cli_args()
    config = get_config()

    setup_logging(args.log_level or config.log_level)
    logger = logging.getLogger("bootstrap.cli")

    try:
        result = get_dispatcher().dispatch(args.command, config=config, namespace=args)
    except (IdlError, ValueError, OSError) as ex:
        logger.error(f"{args.command} failed: {ex}")
        print(str(ex), file=sys.stderr)
        return 1

    print(get_renderer().render(result.to_dict()))
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
