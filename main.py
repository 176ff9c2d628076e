from rich.pretty import pprint

from gnuopts import *

parser = arguments(
    OptionSpec("verbose", "-v", "--verbose", accumulator=counter(), flag=True),
    OptionSpec("jobs", "-j", "--jobs", accumulator=single("int")),
    OptionSpec("define", "-D", "--define", accumulator=many(), nargs="+"),
    OptionSpec("output", "-o", "--output", accumulator=single("path"), required=True),
    configuration=ParserConfiguration(abbreviations=True),
)


if __name__ == '__main__':
    outcome = parser.parse()
    pprint(outcome.results())
    pprint(outcome.residuals)
    outcome.raise_for_faults(shell=True)
