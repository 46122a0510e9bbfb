import argparse
import dataclasses
import sys

import pandas as pd

from .Harvest import Harvest
from .config import ScrapeConfig, load_config, make_target_key
from .logs import get_timelog


def main(argv=None):

    parser = argparse.ArgumentParser(
        epilog=('scrape results for the passed years, eg "2021 2022 -c 1"')
    )

    parser.add_argument('years', type=int, nargs='*',
                        help='the years eg "2021"')
    parser.add_argument('-c', '--circuit', action='append', dest='circuits',
                        help='circuit code on the site, can be repeated')
    parser.add_argument('--config', type=str,
                        help='json config file, overridden by other args')
    parser.add_argument('-i', '--interval', type=float,
                        help='minimum seconds between requests')
    parser.add_argument('-x', '--exclude', action='append', default=[],
                        help='skip a target, eg "tour-de-france/2021/2"')
    parser.add_argument('-w', '--workers', type=int,
                        help='threads for fetching results')
    parser.add_argument('--log', type=str,
                        help='log to this file as well as stderr')

    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else ScrapeConfig()

    overrides = {}
    if args.years:
        overrides['years'] = set(args.years)
    if args.circuits:
        overrides['circuits'] = set(args.circuits)
    if args.interval is not None:
        overrides['min_request_interval'] = args.interval
    if args.workers is not None:
        overrides['workers'] = args.workers
    if args.exclude:
        overrides['excluded_targets'] = (
            config.excluded_targets | {make_target_key(x) for x in args.exclude})

    # replace() runs the config checks again on the overridden values
    try:
        config = dataclasses.replace(config, **overrides)
    except ValueError as e:
        parser.error(str(e))

    if not config.years:
        parser.error('no years to scrape')

    get_timelog()
    if args.log:
        get_timelog(args.log)

    hv = Harvest(config)
    df = hv.run()

    with pd.option_context('display.max_columns', 12, 'display.width', 160):
        print(df.head(20))

    print(f'\n{df.shape[0]} rows, {df.shape[1]} columns\n')
    print(hv.summary())

    return 1 if hv.cancelled else 0


if __name__ == '__main__':
    sys.exit(main())
