import argparse
import logging
import sys
import time

from datetime import datetime

import logzero
from logzero import logger

from chaoskube.chaoskube import Chaoskube
from chaoskube.common import DEFAULT_CHAOS_GRACE_PERIOD, \
    DEFAULT_CHAOS_INTERVAL, DEFAULT_CHAOS_TIMEZONE, false_list, \
    parse_duration, true_list
from chaoskube.execute.cluster import KubernetesClient
from chaoskube.probes.time_window import TimeWindowPolicy, WEEKDAY_NAMES, \
    parse_time_periods, parse_weekdays, resolve_timezone
from chaoskube.selector import parse_selector


# Command-line Argument Parsing
def str2bool(v):
    if v.lower() in true_list:
        return True
    elif v.lower() in false_list:
        return False
    else:
        raise argparse.ArgumentTypeError(
            'Boolean value (yes, no, true, false, y, n, 1, or 0) expected.')


LOG_LEVEL_HELP = """Logging level.
                      [LOG-LEVEL]: notset, debug, info, warning, error, critical
                      Default: info"""
levels = {
    'notset': logging.NOTSET,
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL
}


def log_level(v):
    if v.lower() in levels.keys():
        return levels[v.lower()]
    else:
        raise argparse.ArgumentTypeError(
            'Expected one of the following: {}.'.format(
                 ', '.join(levels.keys())))


def _argument_type(parse, what):
    # Turn a parser's ValueError into an argparse error so that bad
    # configuration aborts before the first cycle
    def convert(v):
        try:
            return parse(v)
        except ValueError as e:
            raise argparse.ArgumentTypeError('Invalid {}. Reason: {}'.format(
                what, e))
    convert.__name__ = what
    return convert


def _timezone_name(name):
    # Keep the name for logging, resolving it here only to validate it
    resolve_timezone(name)
    return name


selector = _argument_type(parse_selector, 'selector')
timezone = _argument_type(_timezone_name, 'timezone')
hours = _argument_type(parse_time_periods, 'excluded hours')
duration = _argument_type(parse_duration, 'duration')


def program_args():
    parser = argparse.ArgumentParser(
        prog='chaoskube',
        description='Periodically kills a random pod in a Kubernetes cluster.')

    parser.add_argument('--labels', type=selector, default='',
                        help='A set of labels to restrict the list of ' \
                        'affected pods, e.g. \'tier=web,!canary\'. ' \
                        'Default: everything.')
    parser.add_argument('--annotations', type=selector, default='',
                        help='A set of annotations to restrict the list of ' \
                        'affected pods. Default: everything.')
    parser.add_argument('--namespaces', type=selector, default='',
                        help='A set of namespaces to restrict the list of ' \
                        'affected pods, e.g. \'!kube-system\'. ' \
                        'Default: everything.')
    parser.add_argument('--excluded-weekdays', type=parse_weekdays,
                        default='', help='A list of weekdays when ' \
                        'termination is suspended, e.g. sat,sun')
    parser.add_argument('--excluded-hours', type=hours, default='',
                        help='A list of hour ranges when termination is ' \
                        'suspended, e.g. 12:00AM-8:00AM,12:00PM-1:00PM or ' \
                        '00:00-08:00')
    parser.add_argument('--timezone', type=timezone,
                        default=DEFAULT_CHAOS_TIMEZONE,
                        help='The timezone to apply when detecting the ' \
                        'current weekday and hour, e.g. UTC, Local, ' \
                        'Europe/Berlin. Default: UTC.')
    parser.add_argument('--master', default=None,
                        help='The address of the Kubernetes cluster to target')
    parser.add_argument('--kubeconfig', default=None,
                        help='Path to a kubeconfig file')
    parser.add_argument('--namespace-scope', default=None,
                        help='Only list pods in this namespace. ' \
                        'Default: all namespaces.')
    parser.add_argument('--interval', type=duration,
                        default=DEFAULT_CHAOS_INTERVAL,
                        help='Interval between pod terminations, e.g. 30s, ' \
                        '10m, 1h. Default: {}'.format(DEFAULT_CHAOS_INTERVAL))
    parser.add_argument('--grace-period', type=int,
                        default=DEFAULT_CHAOS_GRACE_PERIOD,
                        help='Grace period in seconds given to a terminated ' \
                        'pod. Default: {}'.format(DEFAULT_CHAOS_GRACE_PERIOD))
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the random victim selection. ' \
                        'Default: current time in nanoseconds.')
    parser.add_argument('--dry-run', type=str2bool, nargs='?', const=True,
                        default=True, help='If true, don\'t actually do ' \
                        'anything. Default: Y Options (case insensitive): ' \
                        'y, yes, true, 1, n, no, false, 0')
    parser.add_argument('--no-dry-run', dest='dry_run', action='store_false',
                        help='Actually terminate pods.')
    parser.add_argument('--debug', action='store_true', default=False,
                        help='Enable debug logging.')
    parser.add_argument('-l', '--log-level', type=log_level, nargs='?',
                        const=logging.INFO, default=logging.INFO,
                        help=LOG_LEVEL_HELP)
    return parser


def parse_args(argv=None, parser=program_args()):
    return parser.parse_args(args=argv)


def init(args):
    if args.debug:
        args.log_level = logging.DEBUG
    logzero.loglevel(args.log_level)

    logger.debug("Initializing...")
    logger.debug("args: %s", args)

    if args.dry_run:
        logger.info("Dry run enabled. I won't kill anything. Use " \
                    "--no-dry-run when you're ready.")

    if not args.labels.empty():
        logger.info("Filtering pods by labels: %s", args.labels)
    if not args.annotations.empty():
        logger.info("Filtering pods by annotations: %s", args.annotations)
    if not args.namespaces.empty():
        logger.info("Filtering pods by namespaces: %s", args.namespaces)

    zone = resolve_timezone(args.timezone)
    logger.info("Using time zone: %s (%s)", args.timezone,
                datetime.now(zone).tzname())
    if args.excluded_weekdays:
        logger.info("Excluding weekdays: %s", ','.join(
            WEEKDAY_NAMES[d] for d in args.excluded_weekdays))
    if args.excluded_hours:
        logger.info("Excluding hours: %s", ','.join(
            str(p) for p in args.excluded_hours))


def build(args, client=None) -> Chaoskube:
    if client is None:
        client = KubernetesClient(master=args.master,
                                  kubeconfig=args.kubeconfig)
    time_window = TimeWindowPolicy(excluded_weekdays=args.excluded_weekdays,
                                   excluded_hours=args.excluded_hours,
                                   timezone=resolve_timezone(args.timezone))
    seed = args.seed if args.seed is not None else time.time_ns()
    logger.debug("Using random seed %d", seed)
    return Chaoskube(client,
                     labels=args.labels,
                     annotations=args.annotations,
                     namespaces=args.namespaces,
                     time_window=time_window,
                     dry_run=args.dry_run,
                     seed=seed,
                     grace_period=args.grace_period,
                     namespace_scope=args.namespace_scope)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        init(args)
        chaoskube = build(args)
        chaoskube.run(args.interval)
    except KeyboardInterrupt:
        logger.info("Interrupted. Exiting.")
        return 0
    except Exception as e:
        logger.exception(e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
