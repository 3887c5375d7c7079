"""
Tests Package.

This package contains test suites for validating the strata runtime and
vignettes, including unit tests for the scheduler, clocks, generators and
path parametrizer, lifecycle and registry behavior under scroll events, and
end-to-end replay through the command line.
"""

# Tests Package
