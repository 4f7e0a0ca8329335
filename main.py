from rich.pretty import pprint

import cflag
from cflag import FlagSet


flags = FlagSet()
flags.flag("-v", "--version", descr="Print the version.")
cflag.set_description("cflag demo application.")

build_flags = FlagSet()
build_flags.option("-j", "--jobs", type=int, default=1, descr="Parallel jobs.")
build_flags.flag("--release", descr="Build with optimizations.")
build = cflag.command("build", "Build the project.", build_flags)

clean = build.command("clean", "Remove build artifacts first.")
clean.set_recursive()


@build.callback
def callback(command, flags):
    pprint(command)
    pprint({spec.name: flags.get(spec.name) for spec in flags})


@cflag.fallback
def fallback(command, flags):
    if command.flags.get_bool("version"):
        print(cflag.__version__)
    else:
        print(cflag.command_usage(), end="")


if __name__ == '__main__':
    cflag.parse(flags=flags)
