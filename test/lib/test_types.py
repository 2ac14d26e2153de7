from hackpl.lib.types import Param
from hackpl.units import Arg

from .. import TestBase


class TestParameterAnnotations(TestBase):

    def test_param_evaluates_to_argument(self):
        argument = Arg.Switch('-u', help='test')
        self.assertIs(Param[bool, argument], argument)

    def test_param_in_unit_signature(self):
        from hackpl.units.formats.hpxtract import hpxtract
        spec = hpxtract._argument_specification
        self.assertIn('unicode', spec)
        self.assertIn('-u', spec['unicode'].args)
